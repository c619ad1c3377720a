"""Deploy configuration for the SkillLedger smart contract.

Idempotent: ``factory.deploy`` reuses an existing app with the same name,
so a deploy that died mid-flight is simply run again. Only a newly created
app is funded.
"""

import logging
import os

import algokit_utils

from ledger_client.backends.algorand import DEFAULT_VALIDITY_WINDOW, default_send_params

logger = logging.getLogger(__name__)

APP_FUNDING_ALGO = int(os.environ.get("APP_FUNDING_ALGO", "1"))


def deploy() -> None:
    from smart_contracts.artifacts.skill_ledger.skill_ledger_client import (
        SkillLedgerFactory,
    )

    algorand = algokit_utils.AlgorandClient.from_environment()
    algorand.set_default_validity_window(DEFAULT_VALIDITY_WINDOW)
    deployer = algorand.account.from_environment("DEPLOYER")

    factory = algorand.client.get_typed_app_factory(
        SkillLedgerFactory, default_sender=deployer.address
    )
    app_client, result = factory.deploy(
        on_update=algokit_utils.OnUpdate.AppendApp,
        on_schema_break=algokit_utils.OnSchemaBreak.AppendApp,
        send_params=default_send_params(),
    )

    if result.operation_performed == algokit_utils.OperationPerformed.Create:
        logger.info("Funding app %d with %d ALGO for Box MBR…", app_client.app_id, APP_FUNDING_ALGO)
        algorand.send.payment(
            algokit_utils.PaymentParams(
                amount=algokit_utils.AlgoAmount(algo=APP_FUNDING_ALGO),
                sender=deployer.address,
                receiver=app_client.app_address,
            ),
            send_params=default_send_params(),
        )

    logger.info("✅ SkillLedger app_id=%d; set SKILLGRAPH_APP_ID=%d", app_client.app_id, app_client.app_id)
