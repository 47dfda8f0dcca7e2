# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from authkeeper.domain.users.entities import AuthResult, User


class SignupRequestDTO(BaseModel):
    email: str = Field(max_length=320)
    username: str = Field(max_length=256)
    password: str = Field(max_length=1024)


class SigninRequestDTO(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(max_length=1024)


class UserDTO(BaseModel):
    id: str
    email: str
    username: str
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> UserDTO:
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            created_at=user.created_at,
        )


class AuthSuccessDTO(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserDTO

    @classmethod
    def from_result(cls, result: AuthResult, *, expires_in: int) -> AuthSuccessDTO:
        return cls(
            token=result.token,
            expires_in=expires_in,
            user=UserDTO.from_domain(result.user),
        )
