"""Domain exceptions and the fixed user-facing messages they map to."""

# Fixed messages shown to end users. Downstream detail is logged, never returned.
UNAUTHENTICATED_MESSAGE = "Usuário não autenticado"
PAYMENT_FAILED_MESSAGE = "Falha ao criar pagamento, tente novamente."
DONATIONS_FETCH_FAILED_MESSAGE = "Falha ao buscar dados"
STATS_FETCH_FAILED_MESSAGE = "Falha ao buscar estatísticas"
ACCOUNT_WITHOUT_ID_MESSAGE = "Falha ao criar conta de pagamento"
ACCOUNT_FAILED_MESSAGE = "Falha ao criar conta"
PROFILE_SAVE_FAILED_MESSAGE = "Falha ao salvar alterações"
USERNAME_SAVE_FAILED_MESSAGE = "Falha ao atualizar o username."
USERNAME_TAKEN_MESSAGE = "Este username já está em uso."


class ApoioError(Exception):
    """Base exception for the Apoio backend."""

    pass


class DonationValidationError(ApoioError):
    """Raised when a donation request fails validation.

    ``message`` is safe to show to the donor.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CreatorNotFoundError(ApoioError):
    """Raised when no creator owns the given connected account id."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"No creator linked to account '{account_id}'")


class AccountProvisioningError(ApoioError):
    """Raised when the payment provider returns an account without an id."""

    pass
