class LocalizacaoError(Exception):
    """Erro base do contexto de localização."""


class EnderecoMascaradoError(LocalizacaoError):
    """Endereço com dados ocultos (`*` ou `...`) não pode ser geocodificado."""


class GeocodificacaoError(LocalizacaoError):
    """Não foi possível obter coordenadas para um ou ambos os endereços."""


class ProvedorIndisponivelError(LocalizacaoError):
    """Falha de transporte ou HTTP ao consultar um provedor externo."""
