"""Read-side use cases for users."""

from uuid import UUID

from apps.users.domain.entities import ActingUser, Role, User
from apps.users.domain.policies import Action, Resource, authorize
from shared.application.context import RequestContext
from shared.application.pagination import Page, normalize_page
from shared.domain.exceptions import NotFoundError


class UserQueries:

    def __init__(self, user_repo):
        self.user_repo = user_repo

    def get(self, actor: ActingUser, user_id: UUID, ctx: RequestContext | None = None) -> User:
        ctx = ctx or RequestContext.background()
        authorize(actor, Resource.for_user(user_id), Action.VIEW_USER)

        user = self.user_repo.get_by_id(ctx, user_id)
        if not user:
            raise NotFoundError('User', user_id)
        return user

    def list(
        self,
        actor: ActingUser,
        role: Role | None = None,
        limit: int | None = None,
        offset: int | None = None,
        ctx: RequestContext | None = None,
    ) -> Page[User]:
        """Admin-only listing with an optional role filter"""
        ctx = ctx or RequestContext.background()
        authorize(actor, Resource(), Action.LIST_USERS)

        limit, offset = normalize_page(limit, offset)
        return Page(
            items=self.user_repo.list(ctx, role=role, limit=limit, offset=offset),
            total_count=self.user_repo.count(ctx, role=role),
            limit=limit,
            offset=offset,
        )
