from .app import IdGenApp
from .settings import load_settings

_app = IdGenApp(load_settings())


async def startup_tasks():
    await _app.startup_tasks()


async def shutdown_tasks():
    await _app.shutdown_tasks()


async def next_id(request):
    return await _app.next_id(request)


async def next_ids(request, count=1):
    return await _app.next_ids(request, count=count)


async def parse_id(snowflake_id, request):
    return await _app.parse_id(snowflake_id, request)


async def metrics_endpoint():
    return await _app.metrics_endpoint()


async def health():
    return await _app.health()


async def ready():
    return await _app.ready()
