"""
Endpoints de Livros.

Contratos:
    - POST /books: Cadastra livro com N cópias
    - GET /books/{id}: Detalhes do livro
    - GET /books/{id}/availability: Disponibilidade para empréstimo
    - POST /books/{id}/copies: Adiciona cópias
    - DELETE /books/{id}: Remove do acervo (sem cópias emprestadas)

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 404: Livro não encontrado
    - 409: ISBN duplicado, livro removido ou cópias emprestadas
"""

from fastapi import APIRouter, status

from lending.core.deps import Books
from lending.schemas.base import ErrorResponse, MessageResponse
from lending.schemas.book import (
    BookAvailability,
    BookCreate,
    BookRead,
    CopiesAdd,
    CopyCounts,
)

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={404: {"model": ErrorResponse}},
)


@router.post(
    "",
    response_model=BookRead,
    status_code=status.HTTP_201_CREATED,
    summary="Cadastrar livro",
    responses={409: {"model": ErrorResponse}},
)
async def create_book(data: BookCreate, service: Books) -> BookRead:
    """
    Cadastra um livro com total_copies cópias, todas disponíveis.

    Raises:
        409: ISBN já cadastrado
    """
    book = await service.register(data)
    return BookRead.model_validate(book)


@router.get(
    "/{book_id}",
    response_model=BookRead,
    summary="Detalhes do livro",
)
async def get_book(book_id: int, service: Books) -> BookRead:
    book = await service.get_by_id(book_id)
    return BookRead.model_validate(book)


@router.get(
    "/{book_id}/availability",
    response_model=BookAvailability,
    summary="Disponibilidade do livro",
)
async def check_availability(book_id: int, service: Books) -> BookAvailability:
    """
    Verifica disponibilidade de um livro.

    Retorna:
        - available: True se há cópia disponível
        - reason: Motivo se indisponível
        - contadores de cópias
    """
    return await service.check_availability(book_id)


@router.post(
    "/{book_id}/copies",
    response_model=CopyCounts,
    summary="Adicionar cópias",
    responses={409: {"model": ErrorResponse}},
)
async def add_copies(book_id: int, data: CopiesAdd, service: Books) -> CopyCounts:
    """Adiciona cópias ao livro (total e disponíveis aumentam juntos)."""
    return await service.add_copies(book_id, data.count)


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    summary="Remover livro",
    responses={409: {"model": ErrorResponse}},
)
async def delete_book(book_id: int, service: Books) -> MessageResponse:
    """
    Remove o livro do acervo (soft delete).

    Raises:
        404: Livro não encontrado
        409: Livro tem cópias emprestadas
    """
    await service.delete(book_id)
    return MessageResponse(message="Livro removido do acervo")
