"""Django ORM implementation of the user repository."""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from apps.users.domain.entities import Role, User
from apps.users.domain.repositories import UserRepository
from apps.users.models import User as UserModel
from shared.application.context import RequestContext
from shared.infrastructure.storage import storage_call

logger = logging.getLogger(__name__)


def user_to_domain(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        phone=model.phone,
        role=Role(model.role),
        is_banned=model.is_banned,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class DjangoUserRepository(UserRepository):

    def get_by_id(self, ctx: RequestContext, user_id: UUID) -> User | None:
        with storage_call(ctx, "users.get_by_id", user_id):
            model = UserModel.objects.filter(pk=user_id).first()
        return user_to_domain(model) if model else None

    def get_by_email(self, ctx: RequestContext, email: str) -> User | None:
        with storage_call(ctx, "users.get_by_email"):
            model = UserModel.objects.filter(email__iexact=email.strip()).first()
        return user_to_domain(model) if model else None

    def list(
        self,
        ctx: RequestContext,
        role: Role | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[User]:
        with storage_call(ctx, "users.list"):
            queryset = UserModel.objects.all()
            if role is not None:
                queryset = queryset.filter(role=role.value)
            models = list(queryset.order_by("created_at", "id")[offset:offset + limit])
        return [user_to_domain(model) for model in models]

    def count(self, ctx: RequestContext, role: Role | None = None) -> int:
        with storage_call(ctx, "users.count"):
            queryset = UserModel.objects.all()
            if role is not None:
                queryset = queryset.filter(role=role.value)
            return queryset.count()

    def exists(self, ctx: RequestContext, user_id: UUID) -> bool:
        with storage_call(ctx, "users.exists", user_id):
            return UserModel.objects.filter(pk=user_id).exists()

    def save(self, ctx: RequestContext, user: User):
        with storage_call(ctx, "users.save", user.id):
            UserModel.objects.update_or_create(
                pk=user.id,
                defaults={
                    "email": user.email,
                    "phone": UserModel.normalize_phone(user.phone),
                    "role": user.role.value,
                    "is_banned": user.is_banned,
                    "is_active": user.is_active,
                    "created_at": user.created_at,
                    "updated_at": user.updated_at,
                },
            )
        logger.debug(f"Saved user {user.id}")
