import pytest

from app.api.checkout.exceptions import CheckoutNaoEncontradoError
from app.api.checkout.services.dependencies import RegistroCheckouts


class RelogioFalso:
    def __init__(self):
        self.agora = 1000.0

    def __call__(self):
        return self.agora


class OrquestradorFalso:
    def __init__(self):
        self.pedido_concluido_id = None
        self.desmontado = False

    def desmontar(self):
        self.desmontado = True


def _registro(relogio):
    return RegistroCheckouts(ttl_segundos=600, ttl_concluido_segundos=60, relogio=relogio)


def test_checkout_ocioso_expira_e_e_desmontado():
    relogio = RelogioFalso()
    registro = _registro(relogio)
    orq = OrquestradorFalso()
    checkout_id = registro.adicionar("disp-1", orq)

    relogio.agora += 601

    with pytest.raises(CheckoutNaoEncontradoError):
        registro.obter(checkout_id, "disp-1")
    assert orq.desmontado
    assert len(registro) == 0


def test_acesso_renova_o_prazo():
    relogio = RelogioFalso()
    registro = _registro(relogio)
    orq = OrquestradorFalso()
    checkout_id = registro.adicionar("disp-1", orq)

    relogio.agora += 500
    registro.obter(checkout_id, "disp-1")
    relogio.agora += 500

    assert registro.obter(checkout_id, "disp-1") is orq
    assert not orq.desmontado


def test_checkout_concluido_sai_com_ttl_curto():
    relogio = RelogioFalso()
    registro = _registro(relogio)
    concluido = OrquestradorFalso()
    concluido.pedido_concluido_id = "order-1"
    em_andamento = OrquestradorFalso()
    id_concluido = registro.adicionar("disp-1", concluido)
    id_em_andamento = registro.adicionar("disp-2", em_andamento)

    relogio.agora += 61
    registro.adicionar("disp-3", OrquestradorFalso())

    assert concluido.desmontado
    assert id_concluido not in registro.ids()
    assert id_em_andamento in registro.ids()
    assert len(registro) == 2


def test_remover_desmonta():
    registro = _registro(RelogioFalso())
    orq = OrquestradorFalso()
    checkout_id = registro.adicionar("disp-1", orq)

    assert registro.remover(checkout_id) is orq
    assert orq.desmontado
    assert registro.remover(checkout_id) is None
