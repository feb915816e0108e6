"""Entry point for running the giveaway bot via python -m giveaway_bot"""

import asyncio

from giveaway_bot.runtime import main

if __name__ == "__main__":
    asyncio.run(main())
