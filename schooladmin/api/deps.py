"""Shared route dependencies: service container and acting user."""
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from schooladmin.config import settings
from schooladmin.container import Container


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_actor(x_user_email: Annotated[Optional[str], Header()] = None) -> str:
    """User recorded in audit entries; authentication happens upstream."""
    if x_user_email and x_user_email.strip():
        return x_user_email.strip()
    return settings.default_actor


# Type aliases for route injection
Services = Annotated[Container, Depends(get_container)]
Actor = Annotated[str, Depends(get_actor)]
