"""Demo application: registration, login and a protected dashboard."""

from lighthouse.demo.app import create_app

__all__ = ["create_app"]
