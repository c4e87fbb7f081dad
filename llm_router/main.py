import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from llm_router import __version__
from llm_router.api.endpoints import router as api_router
from llm_router.core.config import get_config
from llm_router.core.factory import get_manager
from llm_router.core.logging import configure_root_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Build the manager up front so the initial health sweep runs on startup
    get_manager()
    yield


app = FastAPI(title="LLM Router", version=__version__, lifespan=lifespan)

app.include_router(api_router)


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"LLM Router v{__version__}")
        print("")
        print("Usage: python -m llm_router.main")
        print("       or: llmr start")
        print("")
        print("Provider credentials (at least one, unless SKIP_AI_REQUEST=true):")
        print("  OPENAI_API_KEY    - Enables the openai provider")
        print("  ANTHROPIC_API_KEY - Enables the anthropic provider")
        print("")
        print("Optional environment variables:")
        print("  HOST - Server host (default: 0.0.0.0)")
        print("  PORT - Server port (default: 8082)")
        print("  LOG_LEVEL - Logging level (default: INFO)")
        print("  LLM_STRATEGY - Load-balancing strategy (default: cheapest)")
        print("  REQUEST_TIMEOUT - Per-attempt timeout in seconds (default: 30)")
        print("")
        print("For every option, run: llmr config docs")
        sys.exit(0)

    config = get_config()
    log_level = configure_root_logging(config.log_level)
    llm_config = config.llm_config()

    # Configuration summary
    print(f"🚀 LLM Router v{__version__}")
    print("✅ Configuration loaded successfully")
    print(f"   Providers       : {', '.join(p.name for p in llm_config.enabled_providers)}")
    print(f"   Default provider: {llm_config.default_provider}")
    print(f"   Fallback        : {llm_config.fallback_provider or 'none'}")
    print(f"   Strategy        : {llm_config.strategy.value}")
    print(f"   Request Timeout : {config.request_timeout}s")
    print(f"   Server: {config.host}:{config.port}")
    print("")

    get_manager(llm_config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=log_level == "DEBUG",
    )


if __name__ == "__main__":
    main()
