"""Geração do código PIX copia-e-cola (BR Code estático) e do QR code."""
import base64
import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO

import qrcode
from django.conf import settings


GUI_PIX = "br.gov.bcb.pix"
REFERENCIA_PADRAO = "***"


def limpar_texto_pix(value, max_len):
    normalized = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    normalized = re.sub(r"[^A-Za-z0-9 ]+", "", normalized)
    normalized = re.sub(r"\s+", " ", normalized).strip().upper()
    return normalized[:max_len]


def _emv(field_id, value):
    return f"{field_id}{len(value):02d}{value}"


def crc16_ccitt(payload: str) -> str:
    crc = 0xFFFF
    for byte in payload.encode("utf-8"):
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"


def telefone_com_ddi(valor) -> str:
    """Dígitos do telefone com o DDI 55; 10 ou 11 dígitos são tratados como DDD + número."""
    digits = re.sub(r"\D", "", valor or "")
    if len(digits) in (10, 11):
        return f"55{digits}"
    return digits


def normalizar_chave(tipo_chave, chave):
    chave = (chave or "").strip()
    tipo = (tipo_chave or "").upper()
    if tipo in ("CPF", "CNPJ"):
        return re.sub(r"\D", "", chave)
    if tipo == "TELEFONE":
        return f"+{telefone_com_ddi(chave)}"
    if tipo == "EMAIL":
        return chave.lower()
    return chave


def gerar_payload_pix(chave, valor, nome, cidade, referencia=None) -> str:
    if not chave:
        raise ValueError("Chave PIX não informada.")

    conta = _emv("00", GUI_PIX) + _emv("01", chave)
    campos = [
        _emv("00", "01"),
        _emv("01", "11"),
        _emv("26", conta),
        _emv("52", "0000"),
        _emv("53", "986"),
    ]

    valor = Decimal(valor or 0).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if valor > 0:
        campos.append(_emv("54", f"{valor:.2f}"))

    referencia = limpar_texto_pix(referencia, 25).replace(" ", "") or REFERENCIA_PADRAO
    campos += [
        _emv("58", "BR"),
        _emv("59", limpar_texto_pix(nome, 25) or "CONDOMINIO"),
        _emv("60", limpar_texto_pix(cidade, 15) or "BRASIL"),
        _emv("62", _emv("05", referencia)),
        "6304",
    ]
    payload = "".join(campos)
    return payload + crc16_ccitt(payload)


def payload_do_condominio(condominio, valor, referencia=None):
    chave_pix = getattr(condominio, "chave_pix", None)
    if chave_pix is None:
        return None
    chave = normalizar_chave(chave_pix.tipo_chave, chave_pix.chave)
    return gerar_payload_pix(chave, valor, condominio.nome, condominio.cidade, referencia)


def gerar_qrcode_data_uri(payload) -> str:
    if not payload:
        return ""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=getattr(settings, "PIX_QR_BOX_SIZE", 8),
        border=2,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
