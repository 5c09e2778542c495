"""Secret reference resolution for contract-deployer library."""

import logging
import os
from typing import Mapping, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys.exceptions import ValidationError as KeyValidationError

from .constants import ENV_PREFIX
from .exceptions import NoSigningCredentialError

logger = logging.getLogger(__name__)


class EnvSecretProvider:
    """
    Resolves secret references against the process environment.

    Reference forms:
    - "env:NAME": value of environment variable NAME (None if unset or empty)
    - anything else: the reference itself, used as a literal value
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def secret(self, ref: Optional[str]) -> Optional[str]:
        """
        Resolve a secret reference to its value.

        Args:
            ref: Secret reference, or None

        Returns:
            Secret value, or None if the reference is absent or unset
        """
        if not ref:
            return None
        if ref.startswith(ENV_PREFIX):
            return self._environ.get(ref[len(ENV_PREFIX):]) or None
        return ref

    def account(self, ref: Optional[str]) -> LocalAccount:
        """
        Resolve a credential reference to a local signing account.

        Args:
            ref: Credential reference from a network profile

        Returns:
            eth_account LocalAccount

        Raises:
            NoSigningCredentialError: If the reference is absent, unset or not a valid key
        """
        if ref is None:
            raise NoSigningCredentialError("Network profile has no signing credential")

        key = self.secret(ref)
        if key is None:
            raise NoSigningCredentialError(f"Signing credential '{ref}' is not set")

        try:
            account = Account.from_key(key)
        except (ValueError, TypeError, KeyValidationError) as e:
            raise NoSigningCredentialError(
                f"Signing credential '{ref}' is not a valid private key"
            ) from e

        logger.debug("Credential '%s' resolved to account %s", ref, account.address)
        return account
