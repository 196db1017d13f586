# mdfe/sefaz_factory.py
"""
Factory do gateway SEFAZ.

Ponto único onde se decide entre o client HTTP real e o mock, a partir dos
settings MDFE_*. Services e views recebem o gateway pronto.
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from mdfe.sefaz_clients import HttpSefazGateway, MockSefazGateway, SefazGatewayProtocol


def get_sefaz_gateway() -> SefazGatewayProtocol:
    """
    Regras:
      - MDFE_GATEWAY_MOCK=True devolve MockSefazGateway (desenvolvimento).
      - Caso contrário, MDFE_API_URL e MDFE_TOKEN são obrigatórios;
        ausência é erro de configuração do servidor, não do usuário.
    """
    if getattr(settings, "MDFE_GATEWAY_MOCK", False):
        return MockSefazGateway()

    base_url = getattr(settings, "MDFE_API_URL", "") or ""
    token = getattr(settings, "MDFE_TOKEN", "") or ""

    if not base_url.strip():
        raise ImproperlyConfigured("MDFE_API_URL não configurada.")
    if not token.strip():
        raise ImproperlyConfigured("MDFE_TOKEN não configurado.")

    return HttpSefazGateway(
        base_url=base_url,
        token=token,
        timeout=float(getattr(settings, "MDFE_API_TIMEOUT", 30)),
        user_agent=getattr(settings, "MDFE_USER_AGENT", "MDFe-SaaS-Backend/1.0"),
    )
