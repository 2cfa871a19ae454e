from typing import Optional

from sqlalchemy.orm import Session

from app.api.checkout.models.model_sessao_cliente import SessaoClienteModel


class SessaoClienteRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_dispositivo(self, dispositivo_id: str) -> Optional[SessaoClienteModel]:
        return self.db.query(SessaoClienteModel).filter_by(dispositivo_id=dispositivo_id).first()

    def upsert(self, dispositivo_id: str, **data) -> SessaoClienteModel:
        obj = self.get_by_dispositivo(dispositivo_id)
        if obj is None:
            obj = SessaoClienteModel(dispositivo_id=dispositivo_id, **data)
            self.db.add(obj)
        else:
            for field, value in data.items():
                setattr(obj, field, value)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, dispositivo_id: str) -> bool:
        obj = self.get_by_dispositivo(dispositivo_id)
        if obj is None:
            return False
        self.db.delete(obj)
        self.db.commit()
        return True
