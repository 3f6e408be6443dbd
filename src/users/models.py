from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class UserIdentity(BaseModel):
    """The authenticated user as exposed to route handlers and clients."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(default="", alias="lastName")


class UserRecord(BaseModel):
    """A stored user row, including the password hash."""
    id: int
    email: str
    first_name: str
    last_name: str = ""
    password_hash: str

    def to_identity(self) -> UserIdentity:
        return UserIdentity(id=self.id, email=self.email, first_name=self.first_name, last_name=self.last_name)


def _check_password(value: str) -> str:
    if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    first_name: str = Field(alias="firstName", min_length=1, max_length=64)
    last_name: str = Field(default="", alias="lastName", max_length=64)
    password: str = Field(min_length=1)
    remember_me: bool = Field(default=False, alias="rememberMe")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return _check_password(value)


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(min_length=1)
    remember_me: bool = Field(default=False, alias="rememberMe")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return _check_password(value)


class MessageResponse(BaseModel):
    message: str


def parse_user_id(value: str) -> int:
    """
    Parse a user id taken from a request path.

    Raises:
        ValueError: if the value is not a positive integer
    """
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"invalid user id: {value!r} is not a positive integer")
    user_id = int(value)
    if user_id <= 0:
        raise ValueError(f"invalid user id: {value!r} is not a positive integer")
    return user_id
