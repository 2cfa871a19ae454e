from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.checkout.models.model_pedido_local import PedidoLocalModel


class PedidoLocalRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, pedido_id: str) -> Optional[PedidoLocalModel]:
        return self.db.query(PedidoLocalModel).filter(PedidoLocalModel.id == pedido_id).first()

    def list_by_dispositivo(self, dispositivo_id: str, limit: int = 50) -> List[PedidoLocalModel]:
        stmt = (
            select(PedidoLocalModel)
            .where(PedidoLocalModel.dispositivo_id == dispositivo_id)
            .order_by(PedidoLocalModel.created_at.desc(), PedidoLocalModel.id.desc())
            .limit(int(limit))
        )
        return self.db.execute(stmt).scalars().all()

    def create(self, **data) -> PedidoLocalModel:
        obj = PedidoLocalModel(**data)
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, db_obj: PedidoLocalModel, **data) -> PedidoLocalModel:
        for field, value in data.items():
            setattr(db_obj, field, value)
        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj
