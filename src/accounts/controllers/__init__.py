from .account import AccountController

__all__ = ["AccountController"]
