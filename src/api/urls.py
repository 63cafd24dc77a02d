from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from src.api.exception_handler import attach_exception_handlers
from src.applications.apis import ApplicationController
from src.applications.statistics_apis import StatisticsController
from src.auditaction.apis import AuditActionController
from src.seals.apis import SealController
from src.users.apis import UserController


api = NinjaExtraAPI(title="Seal Registry API", version="1.0.0", csrf=False)

# JWT Authentication
api.register_controllers(NinjaJWTDefaultController)

# Register exception handlers in one place
attach_exception_handlers(api)

api.register_controllers(
    UserController,
    SealController,
    ApplicationController,
    StatisticsController,
    AuditActionController,
)
