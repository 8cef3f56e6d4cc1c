from sleeper_sync.integrations.sleeper_api import SleeperAPIClient

async def get_sleeper_client():
    """Dependency yielding a Sleeper client that is closed after the request"""
    client = SleeperAPIClient()
    try:
        yield client
    finally:
        await client.close()
