"""FastAPI dependencies that run an endpoint's guard chain."""

from __future__ import annotations

from functools import partial
from typing import Optional, Sequence

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from projecthub.core.logging import bind_principal
from projecthub.db import get_db
from projecthub.schemas.enums import TASK_MANAGER_ROLES, ProjectRole, SystemRole
from projecthub.services.authorization import (
    Guard,
    RequestContext,
    authenticate,
    check_membership,
    check_project_role,
    check_system_role,
    extract_token,
    run_guards,
)


class Authorize:
    """
    Guard chain declared per endpoint::

        ctx: RequestContext = Depends(Authorize(membership=True, project_roles=[ProjectRole.ADMIN]))

    The chain always authenticates, then optionally checks the system role,
    the membership of the ``project_id`` path parameter and the project role.
    """

    def __init__(
        self,
        *,
        system_roles: Optional[Sequence[SystemRole]] = None,
        membership: bool = False,
        project_roles: Optional[Sequence[ProjectRole]] = None,
    ):
        if project_roles and not membership:
            raise ValueError("project_roles requires membership=True")
        self.system_roles = list(system_roles or [])
        self.membership = membership
        self.project_roles = list(project_roles or [])

    def guards(self, request: Request, db: Session) -> list[Guard]:
        chain: list[Guard] = [
            partial(authenticate, db=db, token=extract_token(request.cookies, request.headers.get("Authorization")))
        ]
        if self.system_roles:
            chain.append(partial(check_system_role, allowed=self.system_roles))
        if self.membership:
            chain.append(partial(check_membership, db=db, project_id=request.path_params.get("project_id")))
        if self.project_roles:
            chain.append(partial(check_project_role, allowed=self.project_roles))
        return chain

    async def __call__(self, request: Request, db: Session = Depends(get_db)) -> RequestContext:
        # Guards hit the database, so they run in the threadpool; the principal
        # is bound here, in the request context the handler inherits.
        ctx = RequestContext(endpoint=request.url.path, method=request.method)
        ctx = await run_in_threadpool(run_guards, ctx, self.guards(request, db))
        bind_principal(ctx.principal_id)
        return ctx


authenticated = Authorize()
system_admin = Authorize(system_roles=[SystemRole.ADMIN])
project_member = Authorize(membership=True)
project_admin = Authorize(membership=True, project_roles=[ProjectRole.ADMIN])
task_manager = Authorize(membership=True, project_roles=TASK_MANAGER_ROLES)
