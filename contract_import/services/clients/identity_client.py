"""Login-account provisioning for imported customers."""

import secrets
from typing import Optional
from uuid import UUID

import httpx
from pydantic import BaseModel, ConfigDict, Field

from contract_import.core.config import IdentitySettings, settings
from contract_import.core.exceptions import APITimeoutError, IdentityProvisioningError
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Look-alike characters (I, O, l, 0, 1) are left out.
UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnopqrstuvwxyz"
DIGITS = "23456789"
SPECIAL = "@#$%"


def generate_password() -> str:
    """Generate a 10 character password with every character class present."""
    alphabet = UPPERCASE + LOWERCASE + DIGITS + SPECIAL
    chars = [secrets.choice(UPPERCASE)]
    chars += [secrets.choice(LOWERCASE) for _ in range(2)]
    chars += [secrets.choice(DIGITS) for _ in range(5)]
    chars.append(secrets.choice(SPECIAL))
    chars.append(secrets.choice(alphabet))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


class CreateUserRequest(BaseModel):
    """Provisioning request sent to the identity service."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    full_name: str = Field(serialization_alias="fullName")
    phone: Optional[str] = None
    address: Optional[str] = None
    role_name: str = Field(serialization_alias="roleName")
    auth_provider: str = Field(serialization_alias="authProvider")


class CreateUserResponse(BaseModel):
    """Provisioning outcome returned by the identity service."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    user_id: Optional[UUID] = Field(default=None, validation_alias="userId")
    error_message: Optional[str] = Field(default=None, validation_alias="errorMessage")


class IdentityProvisioningClient:
    """Requests login accounts from the identity service over HTTP.

    Args:
        client: Optional shared httpx client; one is opened per call otherwise.
        config: Identity settings; the application settings by default.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[IdentitySettings] = None,
    ):
        self.client = client
        self.config = config or settings.identity

    def build_request(
        self,
        email: str,
        password: str,
        full_name: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> CreateUserRequest:
        return CreateUserRequest(
            email=email,
            password=password,
            full_name=full_name,
            phone=phone,
            address=address,
            role_name=self.config.role_name,
            auth_provider=self.config.auth_provider,
        )

    async def _post(self, client: httpx.AsyncClient, request: CreateUserRequest) -> CreateUserResponse:
        response = await client.post(
            self.config.provision_url,
            json=request.model_dump(by_alias=True),
            timeout=self.config.timeout_seconds,
        )
        if response.status_code >= 400:
            LOGGER.error(
                f"Identity service rejected provisioning: {response.text}",
                extra={"status_code": response.status_code, "email": request.email},
            )
            raise IdentityProvisioningError(
                f"Identity service returned {response.status_code}: {response.text}"
            )
        return CreateUserResponse.model_validate(response.json())

    async def create_user(self, request: CreateUserRequest) -> CreateUserResponse:
        """Ask the identity service to create a login account.

        The call waits at most ``timeout_seconds`` (30 by default).

        Args:
            request: Account details including the generated password

        Returns:
            The service's response; ``success`` is False on a business rejection

        Raises:
            APITimeoutError: If the service does not answer in time
            IdentityProvisioningError: On transport errors or HTTP failures
        """
        try:
            if self.client is not None:
                return await self._post(self.client, request)
            async with httpx.AsyncClient() as client:
                return await self._post(client, request)
        except httpx.TimeoutException as e:
            LOGGER.warning(
                "Identity provisioning timed out",
                extra={"email": request.email, "timeout": self.config.timeout_seconds},
            )
            raise APITimeoutError("Identity provisioning timed out", original_error=e)
        except httpx.HTTPError as e:
            LOGGER.error(f"Identity provisioning failed: {str(e)}", exc_info=True)
            raise IdentityProvisioningError(f"Identity provisioning failed: {str(e)}", original_error=e)
