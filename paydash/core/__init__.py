"""Pure schedule logic shared between the CLI and web app."""
