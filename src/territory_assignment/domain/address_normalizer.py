# ============================================================
# 📦 src/territory_assignment/domain/address_normalizer.py
# ============================================================

import re
import unicodedata
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from territory_assignment.domain.entities import Address


# ============================================================
# 🔤 Regras de normalização (aplicadas em ordem, uma vez na ingestão)
# ============================================================

def _remover_acentos(s: str) -> str:
    return (
        unicodedata.normalize("NFKD", s)
        .encode("ascii", "ignore")
        .decode("ascii")
    )


def _colapsar_espacos(s: str) -> str:
    return re.sub(r"\s+", " ", s)


REGRAS_NORMALIZACAO: Tuple[Callable[[str], str], ...] = (
    str.strip,
    str.lower,
    _remover_acentos,
    _colapsar_espacos,
)


def normalizar_texto(valor: Optional[str]) -> str:
    """Chave de comparação: 'São  Paulo ' -> 'sao paulo'."""
    if not valor:
        return ""
    s = str(valor)
    for regra in REGRAS_NORMALIZACAO:
        s = regra(s)
    return s


def somente_digitos(valor: Optional[str]) -> str:
    if not valor:
        return ""
    return re.sub(r"\D", "", str(valor))


def extrair_cep(texto: Optional[str]) -> Optional[str]:
    """Primeiro CEP (12345-678 ou 12345678) encontrado num texto livre."""
    if not texto:
        return None
    m = re.search(r"\d{5}-?\d{3}", texto)
    return m.group(0) if m else None


# ============================================================
# 🏷️ Apelidos de campos (planilhas / formulários / JSON legados)
# ============================================================

ALIASES_CAMPOS: Dict[str, Tuple[str, ...]] = {
    "street": ("street", "logradouro", "rua", "endereco"),
    "number": ("number", "numero", "num"),
    "neighborhood": ("neighborhood", "bairro"),
    "city": ("city", "cidade", "localidade", "municipio"),
    "state": ("state", "estado", "uf"),
    "postal_code": ("postal_code", "postalcode", "zip", "zipcode", "cep"),
}


def _chave_campo(nome: str) -> str:
    return normalizar_texto(nome).replace("_", "").replace(" ", "")


_ALIAS_PARA_CAMPO = {
    _chave_campo(alias): campo
    for campo, aliases in ALIASES_CAMPOS.items()
    for alias in aliases
}


def _limpar_valor(valor: Any) -> Optional[str]:
    if valor is None:
        return None
    s = _colapsar_espacos(str(valor).strip())
    return s or None


def address_from_raw(raw: Optional[Mapping[str, Any]]) -> Address:
    """
    Converte o JSON de endereço (qualquer grafia de campo conhecida)
    num Address. O primeiro apelido preenchido vence.
    """
    if not raw:
        return Address()

    valores: Dict[str, Optional[str]] = {}
    for chave, valor in raw.items():
        campo = _ALIAS_PARA_CAMPO.get(_chave_campo(str(chave)))
        if campo is None or valores.get(campo):
            continue
        valores[campo] = _limpar_valor(valor)

    if not valores.get("postal_code"):
        valores["postal_code"] = extrair_cep(valores.get("street"))

    return Address(**valores)


def montar_consulta(address: Address) -> str:
    """Campos preenchidos separados por ', ' (CEP só com dígitos)."""
    partes = [
        address.street,
        address.number,
        address.neighborhood,
        address.city,
        address.state,
        somente_digitos(address.postal_code),
    ]
    return ", ".join(p.strip() for p in partes if p and p.strip())


def corresponde_a_algum(valor: Optional[str], alvos: Iterable[str]) -> bool:
    """Comparação tolerante: substring em qualquer direção, após normalizar."""
    v = normalizar_texto(valor)
    if not v:
        return False
    for alvo in alvos:
        a = normalizar_texto(alvo)
        if a and (a in v or v in a):
            return True
    return False
