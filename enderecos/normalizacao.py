# enderecos/normalizacao.py

import unicodedata


def normalizar_nome(nome: str | None) -> str:
    """
    Normaliza nomes de localidades para comparação:
    remove acentos, colapsa espaços e converte para maiúsculas.

        "  São   João del-Rei " -> "SAO JOAO DEL-REI"
    """
    if not nome:
        return ""
    sem_acento = unicodedata.normalize("NFKD", nome).encode("ascii", "ignore").decode("ascii")
    return " ".join(sem_acento.split()).upper()
