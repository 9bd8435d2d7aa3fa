"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from lazy_lifts.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/backup/{owner_id}", dependencies=[Depends(require_admin)])
async def export_backup(owner_id: str, request: Request) -> dict[str, object]:
    """Return an owner's cycles and completions."""
    container: AppContainer = request.app.state.container
    return container.backup_service.create_backup(owner_id)


@router.post("/backup/{owner_id}", dependencies=[Depends(require_admin)])
async def write_backup(owner_id: str, request: Request) -> dict[str, str]:
    """Write an owner's backup file into the configured directory."""
    container: AppContainer = request.app.state.container
    path = container.backup_service.write_backup(
        owner_id, container.settings.backup_dir
    )
    return {"path": str(path)}


@router.post("/restore/{owner_id}", dependencies=[Depends(require_admin)])
async def restore_backup(
    owner_id: str, request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, int]:
    """Restore cycles and completions from a backup payload."""
    container: AppContainer = request.app.state.container
    cycles, workouts = container.backup_service.restore(owner_id, payload)
    container.cycle_service.reload(owner_id)
    return {"cycles": cycles, "workouts": workouts}
