"""Assemble LimitOrderHandlers from Settings."""

from typing import Optional

from .helpers.contract_caller import ContractCaller, construct_contract_caller
from .helpers.fetcher import Fetcher, RequestsFetcher
from .methods import LimitOrderHandlers
from .settings import Settings


def construct_limit_order_handlers(
    settings: Optional[Settings] = None,
    *,
    fetcher: Optional[Fetcher] = None,
    contract_caller: Optional[ContractCaller] = None,
    use_async_web3: bool = False,
) -> LimitOrderHandlers:
    """
    Build handlers for settings.chain_id.

    Transports not passed in are created from settings: a RequestsFetcher and
    a web3 contract caller connected to PROVIDER_URL.
    """
    if settings is None:
        from . import get_settings

        settings = get_settings()

    if fetcher is None:
        fetcher = RequestsFetcher(timeout=settings.request_timeout)

    if contract_caller is None:
        if not settings.rpc_url:
            raise ValueError("PROVIDER_URL environment variable is not set! Cannot read on-chain state.")
        contract_caller = construct_contract_caller(
            settings.rpc_url,
            chain_id=settings.chain_id,
            account=settings.sender_address,
            use_async=use_async_web3,
        )

    return LimitOrderHandlers(
        settings.chain_id,
        fetcher,
        contract_caller,
        settings.api_base,
        private_key=settings.private_key,
        verifying_contracts=settings.verifying_contracts or None,
        deployed_blocks=settings.contract_deployed_blocks or None,
    )
