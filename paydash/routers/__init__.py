"""Router package exports."""
from . import auth, client, dashboard, payments

__all__ = [
	"auth",
	"client",
	"dashboard",
	"payments",
]
