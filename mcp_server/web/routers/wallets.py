"""Wallets router -- development wallets."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from mcp_server.wallets import WalletManager
from mcp_server.web.dependencies import get_wallet_manager
from mcp_server.web.models.api import LocalWalletResponse

router = APIRouter(prefix="/api/wallets", tags=["wallets"])


@router.post("/local", response_model=LocalWalletResponse, summary="Create a local test wallet")
async def create_local_wallet(wallets: WalletManager = Depends(get_wallet_manager)):
    """Generate a keypair-backed wallet held in server memory.

    Development only: the private key never leaves the process, but it is
    not protected either.
    """
    public_key, _ = wallets.create_local_wallet()
    return LocalWalletResponse(success=True, public_key=public_key)
