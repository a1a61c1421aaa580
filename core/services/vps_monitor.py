"""Cliente da API de VPS da Hostinger usado pelo painel de monitoramento."""
from __future__ import annotations

import logging
from typing import Optional

import requests
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

CACHE_KEY = "vps_monitor:resumo"

STATUS_BADGES = {
    "running": ("success", "Em execução"),
    "stopped": ("danger", "Parado"),
    "pending": ("warning", "Pendente"),
    "rebooting": ("info", "Reiniciando"),
}


class VpsApiError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class HostingerClient:
    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None, timeout: int = 15):
        self.token = (token if token is not None else getattr(settings, "HOSTINGER_API_TOKEN", "")).strip()
        self.base_url = (base_url or getattr(settings, "HOSTINGER_API_URL", "")).rstrip("/")
        self.timeout = timeout

    def _get(self, path: str):
        if not self.token:
            raise VpsApiError("HOSTINGER_API_TOKEN não configurado.")
        url = f"{self.base_url}{path}"
        logger.info("Hostinger GET %s", url)
        try:
            response = requests.get(
                url,
                headers={"Authorization": f"Bearer {self.token}", "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.exception("Hostinger sem resposta: %s", exc)
            raise VpsApiError("Erro de comunicação com a API da Hostinger.") from exc

        if response.status_code >= 400:
            logger.error("Hostinger falhou | status=%s body=%s", response.status_code, response.text[:500])
            raise VpsApiError(f"API da Hostinger retornou HTTP {response.status_code}.", response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise VpsApiError("Resposta inválida da API da Hostinger.") from exc

    def listar_maquinas(self):
        data = self._get("/virtual-machines")
        if isinstance(data, dict):
            data = data.get("data", [])
        return data or []

    def detalhar_maquina(self, vm_id):
        data = self._get(f"/virtual-machines/{vm_id}")
        if isinstance(data, dict) and "data" in data and isinstance(data["data"], dict):
            return data["data"]
        return data


def _enderecos(valor):
    enderecos = []
    for item in valor or []:
        if isinstance(item, dict):
            endereco = item.get("address")
        else:
            endereco = item
        if endereco:
            enderecos.append(str(endereco))
    return enderecos


def _banda(valor):
    if isinstance(valor, dict):
        total = valor.get("total_bytes") or 0
        usado = valor.get("used_bytes") or 0
        percentual = round(usado / total * 100, 1) if total else None
        return {"total_mb": round(total / (1024 * 1024)), "usado_mb": round(usado / (1024 * 1024)), "percentual": percentual}
    return {"total_mb": valor or 0, "usado_mb": None, "percentual": None}


def status_badge(estado):
    return STATUS_BADGES.get((estado or "").lower(), ("secondary", estado or "Desconhecido"))


def normalizar_maquina(vm: dict) -> dict:
    template = vm.get("template") or {}
    estado = (vm.get("state") or "").lower()
    badge, rotulo = status_badge(estado)
    return {
        "id": vm.get("id"),
        "hostname": vm.get("hostname") or "",
        "estado": estado,
        "estado_rotulo": rotulo,
        "badge": badge,
        "plano": vm.get("plan") or "",
        "cpus": vm.get("cpus") or 0,
        "memoria_mb": vm.get("memory") or 0,
        "disco_mb": vm.get("disk") or 0,
        "banda": _banda(vm.get("bandwidth")),
        "ipv4": _enderecos(vm.get("ipv4")),
        "ipv6": _enderecos(vm.get("ipv6")),
        "sistema": template.get("name", "") if isinstance(template, dict) else str(template),
        "criado_em": vm.get("created_at") or "",
    }


def resumo_vps(forcar=False, client: Optional[HostingerClient] = None) -> dict:
    if not forcar:
        cached = cache.get(CACHE_KEY)
        if cached is not None:
            return cached

    client = client or HostingerClient()
    maquinas = [normalizar_maquina(vm) for vm in client.listar_maquinas()]
    resumo = {
        "maquinas": maquinas,
        "total": len(maquinas),
        "em_execucao": sum(1 for m in maquinas if m["estado"] == "running"),
        "cpus": sum(m["cpus"] for m in maquinas),
        "memoria_mb": sum(m["memoria_mb"] for m in maquinas),
        "disco_mb": sum(m["disco_mb"] for m in maquinas),
        "atualizado_em": timezone.now().isoformat(timespec="seconds"),
    }
    cache.set(CACHE_KEY, resumo, getattr(settings, "VPS_CACHE_SECONDS", 300))
    return resumo


def detalhe_vps(vm_id, client: Optional[HostingerClient] = None) -> dict:
    client = client or HostingerClient()
    return normalizar_maquina(client.detalhar_maquina(vm_id))
