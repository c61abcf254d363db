"""
OneBun Service-to-Service Auth

Signing outgoing requests and verifying incoming ones with the shared secret.
"""

import asyncio

from onebun_requests import (
    OneBunAuth,
    RequestsOptions,
    RequestsService,
    sign_request,
    validate_onebun_auth,
)

SHARED_SECRET = "change-me"


def sign_and_verify():
    """What the receiving service sees."""
    print("\n=== Sign / verify ===")

    headers = sign_request("POST", "/orders", "billing", SHARED_SECRET)
    for name, value in headers.items():
        print(f"{name}: {value}")

    result = validate_onebun_auth(headers, SHARED_SECRET, method="POST", url="/orders")
    print(f"valid={result.valid} service_id={result.service_id}")

    tampered = validate_onebun_auth(headers, SHARED_SECRET, method="POST", url="/refunds")
    print(f"tampered url valid={tampered.valid}")


async def call_orders_service():
    """RequestsService unwraps {success, result} envelopes and raises on errors."""
    print("\n=== RequestsService with OneBun auth ===")

    options = RequestsOptions(
        base_url="http://orders.internal:3000",
        auth=OneBunAuth(service_id="billing", secret_key=SHARED_SECRET),
    )
    async with RequestsService(options) as service:
        try:
            order = await service.get("/orders/42")
            print(f"Order: {order}")
        except Exception as e:
            print(f"Request failed (expected without a running service): {type(e).__name__}")


if __name__ == "__main__":
    sign_and_verify()
    asyncio.run(call_orders_service())
