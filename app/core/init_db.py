from app.db.base import Base, engine
from app.models import user, post, like, comment, follow  # noqa: F401 (메타데이터 등록)

def init_db():
    Base.metadata.create_all(bind=engine)

if __name__ == "__main__":
    init_db()
