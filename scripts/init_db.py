import asyncio

from app.platform.db.session import engine, init_models


async def create_tables():
    await init_models()
    await engine.dispose()
    print("✅ contacts, preferences and submissions tables are in place")

asyncio.run(create_tables())
