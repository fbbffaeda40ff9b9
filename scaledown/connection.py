"""Temporal client connection."""

import logging

from temporalio.client import Client, TLSConfig

from .config import Settings

logger = logging.getLogger(__name__)


async def connect_temporal(settings: Settings) -> Client:
    """Connect to Temporal with API key or mTLS authentication.

    Args:
        settings: Application settings with Temporal address and credentials

    Returns:
        Connected Temporal client
    """
    if settings.use_api_key_auth():
        logger.info("Using API key authentication")
        client = await Client.connect(
            settings.temporal_address,
            namespace=settings.temporal_namespace,
            api_key=settings.temporal_api_key,
            tls=True,
        )
    else:
        logger.info("Using mTLS certificate authentication")
        with open(settings.temporal_cert_path, "rb") as f:
            client_cert = f.read()
        with open(settings.temporal_key_path, "rb") as f:
            client_key = f.read()

        tls_config = TLSConfig(
            client_cert=client_cert,
            client_private_key=client_key,
        )

        client = await Client.connect(
            settings.temporal_address,
            namespace=settings.temporal_namespace,
            tls=tls_config,
        )

    logger.info(f"Connected to Temporal at {settings.temporal_address}")
    return client
