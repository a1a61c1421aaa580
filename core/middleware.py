from typing import Optional

from django.contrib import messages
from django.contrib.auth import logout
from django.http import HttpRequest
from django.shortcuts import redirect


class CondominioMiddleware:
    """Anexa o condomínio do usuário autenticado à requisição."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest):
        request.condominio: Optional[object] = None
        user = getattr(request, "user", None)
        if user and user.is_authenticated:
            if user.condominio_id:
                request.condominio = user.condominio

            if (
                request.condominio
                and not request.condominio.ativo
                and not user.is_superuser
            ):
                if request.path.startswith("/accounts/login/") and request.method == "POST":
                    return self.get_response(request)
                logout(request)
                messages.error(
                    request,
                    "O acesso deste condomínio está suspenso. Entre em contato com a administração.",
                )
                return redirect("login")
        return self.get_response(request)
