import uuid

from ninja import Body, Query
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from src.api.pagination import Paginator
from src.core.apis import BaseAPIController
from src.users import selectors, services
from src.users.presenters import user_to_dto
from src.users.schemas import FilterParams, UserCreatePayload, UserRolePayload, UserStatusPayload


@api_controller("/users", tags=["Users"], auth=JWTAuth())
class UserController(BaseAPIController):
    @route.get("/me")
    def me(self):
        """Identité de l'utilisateur courant (id, username, role, department)"""
        user = self.context.request.auth
        return self.create_response(message="Current user", data=user_to_dto(user), status_code=200)

    @route.post("/")
    def create_user(self, body: UserCreatePayload = Body(...)):
        current_user = self.context.request.auth
        user = services.user_create_by_admin(
            created_by=current_user,
            username=body.username,
            password=body.password,
            real_name=body.real_name,
            email=body.email,
            phone=body.phone,
            department=body.department,
            position=body.position,
            role=body.role,
        )
        return self.create_response(
            message="User created successfully",
            data=user_to_dto(user),
            status_code=201,
        )

    @route.get("/")
    def list_users(self, filters: Query[FilterParams]):
        user = self.context.request.auth

        qs = selectors.user_list(user=user, status=filters.status, search=filters.search)

        paginator = Paginator(default_page_size=20, max_page_size=100)
        items, meta = paginator.paginate_queryset(qs, self.context.request)

        return self.create_response(
            message="Users fetched",
            data={"items": [user_to_dto(u) for u in items], "pagination": meta},
            status_code=200,
        )

    @route.patch("/{user_id}/role")
    def update_role(self, user_id: uuid.UUID, body: UserRolePayload = Body(...)):
        user = services.user_update_role(user_id=user_id, changed_by=self.context.request.auth, role=body.role)
        return self.create_response(message="User role updated", data=user_to_dto(user))

    @route.patch("/{user_id}/status")
    def update_status(self, user_id: uuid.UUID, body: UserStatusPayload = Body(...)):
        """INACTIVE / LOCKED : les jetons existants sont refusés dès la requête suivante"""
        user = services.user_update_status(user_id=user_id, changed_by=self.context.request.auth, status=body.status)
        return self.create_response(message="User status updated", data=user_to_dto(user))
