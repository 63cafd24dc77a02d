import uuid

from ninja import Body, Query
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from src.api.pagination import Paginator
from src.applications import policies, selectors, services
from src.applications.presenters import application_permissions, application_to_dto
from src.applications.schemas import (
    ApplicationFilterParams,
    ApplicationSubmitPayload,
    ApplicationUpdatePayload,
    BatchDecisionPayload,
    DecisionPayload,
)
from src.core.apis import BaseAPIController
from src.core.db import store_guard


@api_controller("/applications", tags=["Applications"], auth=JWTAuth())
class ApplicationController(BaseAPIController):
    @route.post("/")
    def submit_application(self, body: ApplicationSubmitPayload = Body(...)):
        request = self.context.request
        application = services.application_submit(
            applicant=request.auth,
            request=request,
            **body.dict(),
        )
        return self.create_response(
            message="Application submitted",
            data={"application_id": str(application.id), "application_no": application.application_no},
            status_code=201,
        )

    @route.get("/")
    def list_applications(self, filters: Query[ApplicationFilterParams]):
        """
        scope=my : mes demandes
        scope=pending : demandes en attente de ma décision
        scope=all : toutes (administrateurs)
        """
        request = self.context.request
        with store_guard("application.list"):
            qs = selectors.application_list(
                actor=request.auth,
                scope=filters.scope,
                status=filters.status,
                kind=filters.kind,
                keyword=filters.keyword,
            )
            paginator = Paginator(default_page_size=10, max_page_size=100)
            items, meta = paginator.paginate_queryset(qs, request)
            payload = [application_to_dto(a) for a in items]

        return self.create_response(
            message="Applications fetched",
            data={"list": payload, "total": meta["count"], "pagination": meta},
        )

    @route.get("/upcoming")
    def upcoming_applications(self, hours: int = 24):
        items = selectors.application_upcoming(actor=self.context.request.auth, hours=hours)
        return self.create_response(
            message="Upcoming applications",
            data={"list": [application_to_dto(a) for a in items]},
        )

    @route.post("/batch-decide")
    def batch_decide(self, body: BatchDecisionPayload = Body(...)):
        request = self.context.request
        result = services.application_batch_decide(
            application_ids=body.application_ids,
            actor=request.auth,
            decision=body.decision,
            remark=body.remark,
            request=request,
        )
        return self.create_response(
            message=f"{len(result['succeeded'])} decided, {len(result['failed'])} failed",
            data=result,
        )

    @route.get("/no/{application_no}")
    def get_application_by_no(self, application_no: str):
        application = selectors.application_get_by_no(application_no=application_no)
        return self._detail(application)

    @route.get("/{application_id}")
    def get_application(self, application_id: uuid.UUID):
        application = selectors.application_get(application_id=application_id)
        return self._detail(application)

    @route.patch("/{application_id}")
    def update_application(self, application_id: uuid.UUID, body: ApplicationUpdatePayload = Body(...)):
        request = self.context.request
        application = services.application_update(
            application_id=application_id,
            actor=request.auth,
            request=request,
            **body.dict(exclude_unset=True),
        )
        return self.create_response(message="Application updated", data=application_to_dto(application))

    @route.post("/{application_id}/decide")
    def decide_application(self, application_id: uuid.UUID, body: DecisionPayload = Body(...)):
        request = self.context.request
        application = services.application_decide(
            application_id=application_id,
            actor=request.auth,
            decision=body.decision,
            remark=body.remark,
            request=request,
        )
        return self.create_response(
            message=f"Application {application.status.lower()}",
            data=application_to_dto(application),
        )

    @route.post("/{application_id}/withdraw")
    def withdraw_application(self, application_id: uuid.UUID):
        request = self.context.request
        application = services.application_withdraw(
            application_id=application_id,
            actor=request.auth,
            request=request,
        )
        return self.create_response(
            message="Application withdrawn",
            data={"application_id": str(application.id), "status": application.status},
        )

    def _detail(self, application):
        actor = self.context.request.auth
        policies.ensure_can_view(actor, application)
        data = application_to_dto(application)
        data["permissions"] = application_permissions(actor, application)
        return self.create_response(message="Application", data=data)
