import asyncio

import httpx
import pytest

from app.api.localizacao.adapters.cache_adapter import CacheAdapter
from app.api.localizacao.adapters.nominatim_adapter import NominatimAdapter
from app.api.localizacao.contracts.geolocalizacao_contract import IGeocodificacaoProvider
from app.api.localizacao.exceptions import EnderecoMascaradoError, GeocodificacaoError, ProvedorIndisponivelError
from app.api.localizacao.models.coordenadas import Coordenadas, ResultadoGeocodificacao
from app.api.localizacao.services.service_distancia import (
    DistanciaService,
    estimar_duracao_min,
    formatar_endereco_para_geocodificacao,
    haversine_metros,
)


class ProviderFixo(IGeocodificacaoProvider):
    def __init__(self, respostas):
        self.respostas = respostas
        self.consultas = []

    async def buscar_coordenadas(self, consulta, limite=1):
        self.consultas.append((consulta, limite))
        resposta = self.respostas.get(consulta)
        if isinstance(resposta, Exception):
            raise resposta
        return resposta


def _geo(lat, lon):
    return ResultadoGeocodificacao(coordenadas=Coordenadas(latitude=lat, longitude=lon))


ORIGEM = "Rua A, 10, Centro, Campo Grande, MS, Brasil"
DESTINO = "Rua B, 20, Centro, Campo Grande, MS, Brasil"
CIDADE = "Campo Grande, MS, Brasil"


def test_haversine_um_grau_de_latitude():
    metros = haversine_metros(Coordenadas(latitude=0, longitude=0), Coordenadas(latitude=1, longitude=0))
    assert metros == 111195


def test_haversine_mesmo_ponto():
    ponto = Coordenadas(latitude=-20.46, longitude=-54.62)
    assert haversine_metros(ponto, ponto) == 0


def test_formatar_endereco_completa_cidade_estado_e_pais():
    assert formatar_endereco_para_geocodificacao("Rua A - 12 - Centro", "Campo Grande", "MS") == (
        "Rua A, 12, Centro, Campo Grande, MS, Brasil"
    )
    assert formatar_endereco_para_geocodificacao("Rua A, Campo Grande, MS, Brasil", "Campo Grande", "MS") == (
        "Rua A, Campo Grande, MS, Brasil"
    )


def test_estimar_duracao():
    assert estimar_duracao_min(15, 30) == 30


def test_endereco_mascarado_nao_chama_provedor():
    provider = ProviderFixo({})
    service = DistanciaService(provider, cidade_padrao="Campo Grande", estado_padrao="MS")

    with pytest.raises(EnderecoMascaradoError):
        asyncio.run(service.calcular_distancia("Rua A, 10", "Rua B, 2*"))

    assert provider.consultas == []


def test_calcula_distancia_entre_enderecos():
    provider = ProviderFixo({ORIGEM: _geo(-20.0, -54.0), DESTINO: _geo(-20.01, -54.0)})
    service = DistanciaService(provider, cidade_padrao="Campo Grande", estado_padrao="MS", velocidade_media_kmh=30)

    resultado = asyncio.run(service.calcular_distancia("Rua A, 10, Centro", "Rua B, 20, Centro"))

    assert resultado.distancia_metros == 1112
    assert resultado.distancia_km == 1.11
    assert resultado.duracao_min == 2
    assert resultado.avisos == []
    assert [c for c, _ in provider.consultas] == [ORIGEM, DESTINO]
    assert provider.consultas[0][1] == 5


def test_fallback_para_cidade_gera_aviso():
    provider = ProviderFixo({ORIGEM: _geo(-20.0, -54.0), CIDADE: _geo(-20.02, -54.0)})
    service = DistanciaService(provider, cidade_padrao="Campo Grande", estado_padrao="MS")

    resultado = asyncio.run(service.calcular_distancia("Rua A, 10, Centro", "Rua B, 20, Centro"))

    assert resultado.avisos
    assert (CIDADE, 1) in provider.consultas


def test_destino_nao_encontrado():
    provider = ProviderFixo({ORIGEM: _geo(-20.0, -54.0)})
    service = DistanciaService(provider, cidade_padrao="Campo Grande", estado_padrao="MS")

    with pytest.raises(GeocodificacaoError, match="destino"):
        asyncio.run(service.calcular_distancia("Rua A, 10, Centro", "Rua B, 20, Centro"))


def test_provedor_fora_do_ar_vira_erro_de_geocodificacao():
    provider = ProviderFixo({ORIGEM: ProvedorIndisponivelError("fora")})
    service = DistanciaService(provider, cidade_padrao="Campo Grande", estado_padrao="MS")

    with pytest.raises(GeocodificacaoError):
        asyncio.run(service.calcular_distancia("Rua A, 10, Centro", "Rua B, 20, Centro"))


# ---------------------------- Nominatim ----------------------------
class RelogioFalso:
    def __init__(self):
        self.agora = 100.0
        self.esperas = []

    def __call__(self):
        return self.agora

    async def dormir(self, segundos):
        self.esperas.append(segundos)
        self.agora += segundos


def _nominatim(handler, relogio=None):
    relogio = relogio or RelogioFalso()
    return NominatimAdapter(
        "https://nominatim.test/search",
        user_agent="TesteApp/1.0",
        intervalo_minimo=1.1,
        cache=CacheAdapter(),
        transport=httpx.MockTransport(handler),
        relogio=relogio,
        dormir=relogio.dormir,
    )


def test_nominatim_envia_user_agent_e_filtro_de_pais():
    recebidas = []

    def handler(request):
        recebidas.append(request)
        return httpx.Response(200, json=[{"lat": "-20.46", "lon": "-54.62", "display_name": "Campo Grande"}])

    adapter = _nominatim(handler)
    resultado = asyncio.run(adapter.buscar_coordenadas("Rua A, Campo Grande", limite=5))

    assert resultado.coordenadas.to_tuple() == (-20.46, -54.62)
    assert recebidas[0].headers["User-Agent"] == "TesteApp/1.0"
    assert recebidas[0].url.params["countrycodes"] == "br"
    assert recebidas[0].url.params["limit"] == "5"


def test_nominatim_respeita_intervalo_entre_requisicoes():
    relogio = RelogioFalso()
    adapter = _nominatim(lambda r: httpx.Response(200, json=[{"lat": "1", "lon": "2"}]), relogio)

    async def cenario():
        await adapter.buscar_coordenadas("Rua A")
        await adapter.buscar_coordenadas("Rua B")

    asyncio.run(cenario())
    assert relogio.esperas == [pytest.approx(1.1)]


def test_nominatim_usa_cache():
    chamadas = []

    def handler(request):
        chamadas.append(request)
        return httpx.Response(200, json=[{"lat": "1", "lon": "2"}])

    adapter = _nominatim(handler)

    async def cenario():
        await adapter.buscar_coordenadas("Rua A")
        await adapter.buscar_coordenadas("  rua a ")

    asyncio.run(cenario())
    assert len(chamadas) == 1


def test_nominatim_sem_resultado_retorna_none():
    adapter = _nominatim(lambda r: httpx.Response(200, json=[]))
    assert asyncio.run(adapter.buscar_coordenadas("Lugar nenhum")) is None


def test_nominatim_erro_http():
    adapter = _nominatim(lambda r: httpx.Response(503))
    with pytest.raises(ProvedorIndisponivelError):
        asyncio.run(adapter.buscar_coordenadas("Rua A"))


def test_nominatim_resposta_que_nao_e_lista():
    def handler(request):
        return httpx.Response(200, json={"error": "Unable to geocode"})

    with pytest.raises(ProvedorIndisponivelError):
        asyncio.run(_nominatim(handler).buscar_coordenadas("Rua A"))

    service = DistanciaService(_nominatim(handler), cidade_padrao="Campo Grande", estado_padrao="MS")
    with pytest.raises(GeocodificacaoError):
        asyncio.run(service.calcular_distancia("Rua A, 10, Centro", "Rua B, 20, Centro"))
