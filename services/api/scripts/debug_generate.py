#!/usr/bin/env python3
"""Run the provider chain locally and print what it produced.

Does not touch the database. Useful for checking provider keys and how each
model's output survives parsing.

Usage:
  cd services/api
  OPENAI_API_KEY="..." python -m scripts.debug_generate

Optional:
  DEBUG_GENERATE_N=5          number of categories to request
  DEBUG_GENERATE_PROVIDER=    only try this provider (openai|anthropic|gemini|fallback)
"""

import asyncio
import json
import os
import sys

# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wordapi.services.providers import FallbackGenerator, build_provider_chain  # noqa: E402
from wordapi.settings import get_settings  # noqa: E402


async def main() -> None:
    n = int(os.getenv("DEBUG_GENERATE_N", "5"))
    only = os.getenv("DEBUG_GENERATE_PROVIDER", "").strip().lower()
    settings = get_settings()

    if only == "fallback":
        drafts = FallbackGenerator().generate(n)
        providers: list[str] = []
    else:
        if only:
            settings = settings.model_copy(update={"provider_order": [only]})
        chain = build_provider_chain(settings)
        providers = chain.provider_names
        if not providers:
            print("no provider configured; output comes from the fallback generator")
        drafts = await chain.generate(n)

    print(f"providers tried: {providers or ['(none)']}")
    for d in drafts:
        print(
            json.dumps(
                {"categoryName": d.category_name, "words": d.words, "sourceTag": d.source_tag},
                ensure_ascii=False,
            )
        )


if __name__ == "__main__":
    asyncio.run(main())
