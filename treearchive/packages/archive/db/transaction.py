"""事务边界：为多语句写操作提供“全部提交或全部回滚”的统一入口。"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Provide a commit/rollback boundary that tolerates an already-begun Session.

    FastAPI 请求中的会话可能已经因为先前的 SELECT 隐式开启了事务，
    此时再调用 ``Session.begin()`` 会抛出 ``InvalidRequestError``。
    这里检测该状态：已有事务则在块结束后显式提交/回滚外层事务，
    否则使用 ``db.begin()`` 开启新事务。块内任何异常都会触发回滚并原样抛出。
    """
    if db.in_transaction():
        try:
            yield db
            db.commit()
        except BaseException:
            db.rollback()
            raise
    else:
        with db.begin():
            yield db
