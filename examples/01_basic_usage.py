"""
Basic Usage Examples

Demonstrates deferred requests, results, unwrap and per-call overrides.
"""

import asyncio

from onebun_requests import HttpClient, RequestError, RetryPolicy


async def basic_get_request(client: HttpClient):
    """GET returns a result object, never raises for HTTP errors."""
    print("\n=== Basic GET Request ===")

    result = await client.get("/posts/1")
    if result.success:
        print(f"Status: {result.status_code}")
        print(f"Title: {result.data['title']}")
    else:
        print(f"Failed: {result.error.code} {result.error.message}")


async def post_and_unwrap(client: HttpClient):
    """unwrap() returns the body or raises RequestError."""
    print("\n=== POST with unwrap ===")

    created = await client.post("/posts", {"title": "My Post", "body": "content", "userId": 1}).unwrap()
    print(f"Created: {created}")


async def combinators(client: HttpClient):
    """Each with_* call returns a new task; nothing is sent until await."""
    print("\n=== Task combinators ===")

    task = (
        client.get("/posts", query={"userId": 1})
        .with_timeout(2000)
        .with_retries(max_retries=1, delay=200)
        .with_headers({"X-Request-Source": "examples"})
    )
    print(f"Prepared: {task!r}")

    posts = await task.unwrap()
    print(f"Posts: {len(posts)}")


async def error_handling(client: HttpClient):
    print("\n=== Error handling ===")

    try:
        await client.get("/does-not-exist").unwrap()
    except RequestError as e:
        print(f"{e.code}: status={e.status_code}")
        for error in e.chain():
            print(f"  caused by {error!r}")


async def main():
    retries = RetryPolicy(
        max_retries=2,
        delay=300,
        backoff="exponential",
        on_retry=lambda error, attempt: print(f"  retry #{attempt} after {error.code}"),
    )
    async with HttpClient(base_url="https://jsonplaceholder.typicode.com", timeout=5000, retries=retries) as client:
        await basic_get_request(client)
        await post_and_unwrap(client)
        await combinators(client)
        await error_handling(client)


if __name__ == "__main__":
    asyncio.run(main())
