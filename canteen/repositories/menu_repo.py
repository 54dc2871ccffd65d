# canteen/repositories/menu_repo.py
from sqlalchemy import func, or_
from sqlmodel import Session, select

from canteen.models.menu import ComboOffer, MenuItem, MenuReview


class MenuRepository:
    """
    Data access layer for MenuItem, MenuReview & ComboOffer.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Menu items -----

    def get_by_id(self, session: Session, item_id: str) -> MenuItem | None:
        return session.get(MenuItem, item_id)

    def get_many(self, session: Session, item_ids: list[str]) -> dict[str, MenuItem]:
        if not item_ids:
            return {}
        stmt = select(MenuItem).where(MenuItem.id.in_(item_ids))
        return {item.id: item for item in session.exec(stmt).all()}

    def list_items(
        self,
        session: Session,
        category: str | None = None,
        search: str | None = None,
        only_available: bool = False,
    ) -> list[MenuItem]:
        stmt = select(MenuItem)
        if only_available:
            stmt = stmt.where(MenuItem.available == True)  # noqa: E712
        if category:
            stmt = stmt.where(MenuItem.category == category)
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(MenuItem.name).like(pattern),
                    func.lower(MenuItem.description).like(pattern),
                )
            )
        stmt = stmt.order_by(MenuItem.category, MenuItem.name)
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        value = session.exec(select(func.count()).select_from(MenuItem)).one()
        return int(value or 0)

    def create(self, session: Session, item: MenuItem) -> MenuItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: MenuItem, commit: bool = True) -> MenuItem:
        session.add(item)
        if commit:
            session.commit()
            session.refresh(item)
        else:
            session.flush()
        return item

    def delete(self, session: Session, item: MenuItem) -> None:
        for review in self.list_reviews(session, item.id):
            session.delete(review)
        session.delete(item)
        session.commit()

    # ----- Reviews -----

    def list_reviews(self, session: Session, item_id: str) -> list[MenuReview]:
        stmt = (
            select(MenuReview)
            .where(MenuReview.item_id == item_id)
            .order_by(MenuReview.reviewed_on.desc())
        )
        return list(session.exec(stmt).all())

    def add_review(self, session: Session, review: MenuReview) -> MenuReview:
        session.add(review)
        session.flush()
        return review

    # ----- Combos -----

    def get_combo(self, session: Session, combo_id: str) -> ComboOffer | None:
        return session.get(ComboOffer, combo_id)

    def list_combos(self, session: Session, only_active: bool = False) -> list[ComboOffer]:
        stmt = select(ComboOffer)
        if only_active:
            stmt = stmt.where(ComboOffer.is_active == True)  # noqa: E712
        stmt = stmt.order_by(ComboOffer.name)
        return list(session.exec(stmt).all())

    def save_combo(self, session: Session, combo: ComboOffer) -> ComboOffer:
        session.add(combo)
        session.commit()
        session.refresh(combo)
        return combo

    def delete_combo(self, session: Session, combo: ComboOffer) -> None:
        session.delete(combo)
        session.commit()
