"""
Taxonomia de erros do núcleo de empréstimos.

Todas as recusas esperadas (membro inelegível, livro indisponível, transição
inválida...) são exceções tipadas derivadas de LendingError, com um código
estável e uma mensagem para o usuário final. A camada HTTP traduz cada
código para um status; o texto de erros SQL nunca chega ao usuário.
"""

from lending.models.enums import EligibilityReason, LoanStatus


class LendingError(Exception):
    """
    Erro base do domínio.

    Attributes:
        code: Código estável do erro (usado pela API)
        message: Mensagem amigável para o usuário
        reason: Sub-motivo opcional (ex.: motivo de inelegibilidade)
    """

    code: str = "lending_error"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.message = message
        self.reason = reason


class NotFoundError(LendingError):
    """Membro, livro ou empréstimo inexistente."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} não encontrado", reason=entity.lower())


class IneligibleError(LendingError):
    """Membro não pode pegar livros emprestados no momento."""

    code = "ineligible"

    def __init__(self, reason: EligibilityReason, message: str):
        self.eligibility_reason = reason
        super().__init__(message, reason=reason.value)


class UnavailableError(LendingError):
    """Nenhuma cópia disponível (ou livro removido do acervo)."""

    code = "unavailable"

    def __init__(self, book_id: int):
        self.book_id = book_id
        super().__init__(f"Nenhuma cópia disponível do livro {book_id}")


class InvalidStateTransitionError(LendingError):
    """Operação não permitida no estado atual do empréstimo."""

    code = "invalid_state_transition"

    def __init__(self, message: str, status: LoanStatus | None = None):
        self.status = status
        super().__init__(message, reason=status.value if status else None)


class RenewalLimitExceededError(LendingError):
    """Empréstimo já atingiu o número máximo de renovações."""

    code = "renewal_limit_exceeded"

    def __init__(self, max_renewals: int):
        self.max_renewals = max_renewals
        super().__init__(f"Limite de renovações atingido (máximo: {max_renewals})")


class InvalidRequestError(LendingError):
    """Parâmetro de operação inválido (dias de renovação, descrição do dano...)."""

    code = "invalid_request"


class ConflictError(LendingError):
    """Registro duplicado (ISBN ou matrícula já cadastrados)."""

    code = "conflict"


class InventoryConflictError(LendingError):
    """Ajuste de inventário incompatível com as cópias emprestadas."""

    code = "inventory_conflict"


class InventoryIntegrityError(LendingError):
    """
    Violação de integridade do inventário.

    Ex.: devolução de uma cópia quando available_copies já é igual a
    total_copies. Indica dados inconsistentes, não erro do usuário.
    """

    code = "inventory_integrity"


class PersistenceError(LendingError):
    """
    Falha inesperada de banco (conexão perdida, constraint violada...).

    A exceção original fica em __cause__; a mensagem é genérica.
    Nunca é repetida automaticamente aqui.
    """

    code = "persistence_error"

    def __init__(self, message: str = "Erro interno ao acessar o banco de dados"):
        super().__init__(message)
