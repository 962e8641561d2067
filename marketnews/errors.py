class MarketNewsError(Exception):
    """Base de todos os erros do pipeline de ingestão."""


class FetchError(MarketNewsError):
    """Falha na sessão do navegador ou no carregamento da página."""


class ElementTimeout(FetchError, TimeoutError):
    """O elemento esperado não apareceu na página dentro do prazo."""


class MalformedTimestamp(MarketNewsError, ValueError):
    """O horário bruto não contém uma data/hora reconhecível."""


class StoreError(MarketNewsError):
    """Não foi possível ler ou gravar na tabela de notícias."""


class ElementNotFound(FetchError, LookupError):
    """Nenhum elemento corresponde ao seletor na página já carregada."""
