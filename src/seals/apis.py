import uuid

from ninja import Body, Query
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from src.api.pagination import Paginator
from src.core.apis import BaseAPIController
from src.seals import selectors, services
from src.seals.presenters import seal_to_dto
from src.seals.schemas import SealCreatePayload, SealFilterParams, SealStatusPayload, SealUpdatePayload


@api_controller("/seals", tags=["Seals"], auth=JWTAuth())
class SealController(BaseAPIController):
    @route.get("/")
    def list_seals(self, filters: Query[SealFilterParams]):
        qs = selectors.seal_list(
            keyword=filters.keyword,
            status=filters.status,
            seal_type=filters.type,
            keeper_id=filters.keeper_id,
        )
        paginator = Paginator(default_page_size=20, max_page_size=100)
        items, meta = paginator.paginate_queryset(qs, self.context.request)
        return self.create_response(
            message="Seals fetched",
            data={"list": [seal_to_dto(s) for s in items], "total": meta["count"], "pagination": meta},
        )

    @route.get("/{seal_id}")
    def get_seal(self, seal_id: uuid.UUID):
        seal = selectors.seal_get(seal_id=seal_id)
        return self.create_response(message="Seal", data=seal_to_dto(seal))

    @route.post("/")
    def create_seal(self, body: SealCreatePayload = Body(...)):
        seal = services.seal_create(
            created_by=self.context.request.auth,
            name=body.name,
            seal_type=body.type,
            shape=body.shape,
            keeper_id=body.keeper_id,
            owner_department=body.owner_department,
            keeper_department=body.keeper_department,
            keeper_phone=body.keeper_phone,
            description=body.description,
            location=body.location,
        )
        return self.create_response(message="Seal created", data=seal_to_dto(seal), status_code=201)

    @route.patch("/{seal_id}")
    def update_seal(self, seal_id: uuid.UUID, body: SealUpdatePayload = Body(...)):
        changes = body.dict(exclude_unset=True)
        seal = services.seal_update(seal_id=seal_id, updated_by=self.context.request.auth, **changes)
        return self.create_response(message="Seal updated", data=seal_to_dto(seal))

    @route.patch("/{seal_id}/status")
    def update_seal_status(self, seal_id: uuid.UUID, body: SealStatusPayload = Body(...)):
        seal = services.seal_update_status(
            seal_id=seal_id,
            updated_by=self.context.request.auth,
            status=body.status,
            reason=body.reason,
        )
        return self.create_response(message="Seal status updated", data=seal_to_dto(seal))

    @route.delete("/{seal_id}")
    def delete_seal(self, seal_id: uuid.UUID):
        services.seal_delete(seal_id=seal_id, deleted_by=self.context.request.auth)
        return self.create_response(message="Seal deleted", data={"id": str(seal_id)})
