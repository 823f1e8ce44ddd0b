import asyncio
import os

import httpx

IDGEN_URL = os.getenv("IDGEN_URL", "http://localhost:8080")
IDGEN_API_KEY = os.getenv("IDGEN_API_KEY", "")
IDGEN_COUNT = int(os.getenv("IDGEN_COUNT", "1"))
IDGEN_PARSE = os.getenv("IDGEN_PARSE", "1") == "1"


async def main() -> None:
    headers = {"X-Api-Key": IDGEN_API_KEY} if IDGEN_API_KEY else {}
    async with httpx.AsyncClient(base_url=IDGEN_URL, headers=headers, timeout=5) as client:
        if IDGEN_COUNT > 1:
            response = await client.get("/ids", params={"count": IDGEN_COUNT})
            response.raise_for_status()
            ids = response.json()["ids"]
        else:
            response = await client.get("/ids/next")
            response.raise_for_status()
            ids = [response.json()["id"]]
        for snowflake_id in ids:
            print("id:", snowflake_id)
        if IDGEN_PARSE and ids:
            response = await client.get(f"/ids/{ids[-1]}")
            response.raise_for_status()
            print("parsed:", response.json())


if __name__ == "__main__":
    asyncio.run(main())
