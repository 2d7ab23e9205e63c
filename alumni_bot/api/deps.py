# Role: Process-wide singletons shared by the routers. Routers import flow_controller from here so every request
# sees the same session store and user store.

from __future__ import annotations

import alumni_bot.config as config
from alumni_bot.core.flow_controller import FlowController
from alumni_bot.core.state_manager import StateManager
from alumni_bot.services.user_store import InMemoryUserStore
from alumni_bot.utils.demo_data import seed_demo_users
from alumni_bot.utils.logger import get_logger

log = get_logger("api.deps")

user_store = InMemoryUserStore()
state_manager = StateManager()

if config.SEED_DEMO_DATA:
    log.info("Seeded %d demo users", seed_demo_users(user_store))

flow_controller = FlowController(store=user_store, state_manager=state_manager)
