"""Python consumer of the gateway: API client, job poller and terminal CLI."""
