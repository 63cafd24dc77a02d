from ninja import Query
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from src.applications import statistics
from src.applications.schemas import StatisticsParams
from src.core.apis import BaseAPIController
from src.core.policies import ensure_admin
from src.seals.selectors import seal_registry_summary


@api_controller("/statistics", tags=["Statistics"], auth=JWTAuth())
class StatisticsController(BaseAPIController):
    """scope=my|keeper|all (all: administrateurs) ; kind=USAGE|CREATION optionnel"""

    @route.get("/counts")
    def counts(self, params: Query[StatisticsParams]):
        data = statistics.counts_by_status(actor=self.context.request.auth, scope=params.scope, kind=params.kind)
        return self.create_response(message="Counts by status", data=data)

    @route.get("/durations")
    def durations(self, params: Query[StatisticsParams]):
        data = statistics.duration_statistics(actor=self.context.request.auth, scope=params.scope, kind=params.kind)
        return self.create_response(message="Approval durations", data=data)

    @route.get("/departments")
    def departments(self, params: Query[StatisticsParams]):
        rows = statistics.department_breakdown(actor=self.context.request.auth, scope=params.scope, kind=params.kind)
        return self.create_response(message="Department breakdown", data={"list": rows})

    @route.get("/monthly-trend")
    def monthly_trend(self, params: Query[StatisticsParams], months: int = 6):
        rows = statistics.monthly_trend(
            actor=self.context.request.auth,
            months=months,
            scope=params.scope,
            kind=params.kind,
        )
        return self.create_response(message="Monthly trend", data={"list": rows})

    @route.get("/seal-usage")
    def seal_usage(self, params: Query[StatisticsParams]):
        rows = statistics.seal_usage_ranking(actor=self.context.request.auth, scope=params.scope)
        return self.create_response(message="Seal usage ranking", data={"list": rows})

    @route.get("/seals")
    def seals(self):
        """Registre complet : administrateurs uniquement"""
        ensure_admin(self.context.request.auth)
        return self.create_response(message="Seal registry summary", data=seal_registry_summary())
