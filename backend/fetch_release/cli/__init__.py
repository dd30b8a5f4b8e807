from fetch_release.cli.app import app

__all__ = ["app"]
