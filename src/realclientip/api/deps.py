"""FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of writing
``Annotated[T, Depends(get_xxx)]`` everywhere.  Each can be overridden
in tests via ``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated, Optional

from fastapi import Depends

from realclientip.core import Strategy

from .real_ip import get_client_ip, get_strategy, require_client_ip

ClientIPDep = Annotated[Optional[str], Depends(get_client_ip)]
RequiredClientIPDep = Annotated[str, Depends(require_client_ip)]
StrategyDep = Annotated[Strategy, Depends(get_strategy)]
