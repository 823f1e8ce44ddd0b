from fastapi import FastAPI, Request

from . import services

app = FastAPI()


@app.on_event("startup")
async def startup_tasks() -> None:
    await services.startup_tasks()


@app.on_event("shutdown")
async def shutdown_tasks() -> None:
    await services.shutdown_tasks()


@app.get("/ids/next")
async def next_id(request: Request):
    return await services.next_id(request)


@app.get("/ids")
async def next_ids(request: Request, count: int = 1):
    return await services.next_ids(request, count=count)


@app.get("/ids/{snowflake_id}")
async def parse_id(snowflake_id: str, request: Request):
    return await services.parse_id(snowflake_id, request)


@app.get("/metrics")
async def metrics_endpoint():
    return await services.metrics_endpoint()


@app.get("/health")
async def health():
    return await services.health()


@app.get("/ready")
async def ready():
    return await services.ready()
