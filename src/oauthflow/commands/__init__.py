"""Built-in CLI commands registered on :data:`oauthflow.app.app`."""
