# produtos/erp_factory.py

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from produtos.erp_clients import ErpGatewayProtocol, HttpErpGateway


def get_erp_gateway() -> ErpGatewayProtocol:
    """
    Client do ERP a partir dos settings ERP_*; sem ERP_TOKEN é erro de
    configuração do servidor.
    """
    base_url = getattr(settings, "ERP_API_URL", "") or ""
    token = getattr(settings, "ERP_TOKEN", "") or ""

    if not base_url.strip():
        raise ImproperlyConfigured("ERP_API_URL não configurada.")
    if not token.strip():
        raise ImproperlyConfigured("ERP_TOKEN não configurado.")

    return HttpErpGateway(
        base_url=base_url,
        token=token,
        timeout=float(getattr(settings, "ERP_API_TIMEOUT", 30)),
        user_agent=getattr(settings, "MDFE_USER_AGENT", "MDFe-SaaS-Backend/1.0"),
    )
