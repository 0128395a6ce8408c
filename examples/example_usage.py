"""Ví dụ: dùng AppState và service layer trực tiếp (không qua Flask).

Chạy với backend mock: học sinh gửi đơn, admin duyệt, rồi lọc theo trạng thái.
"""

from src.eduleave.eduleave.common.datetime_utils import now_local
from src.eduleave.eduleave.core.enums import RequestStatus
from src.eduleave.eduleave.gateway.mock_gateway import DEMO_PASSWORD, MockGateway
from src.eduleave.eduleave.requests.view import RequestFilter, filter_requests, paginate
from src.eduleave.eduleave.session.state import AppState
from src.eduleave.eduleave.session.store import SessionStore


def main():
    gateway = MockGateway()
    state = AppState(gateway, SessionStore({}))

    student = state.login("hs1", DEMO_PASSWORD)
    today = now_local().date()
    record = state.request_service.create(
        {"reason": "Ốm", "fromDate": today.isoformat(), "toDate": today.isoformat(), "detail": "Sốt"},
        student,
    )
    print("Đã gửi:", record.request_id, record.status.value)
    state.logout()

    admin = state.login("admin", DEMO_PASSWORD)
    state.request_service.change_status(record.request_id, RequestStatus.APPROVED, admin)

    approved = filter_requests(state.requests, RequestFilter(status=RequestStatus.APPROVED), admin)
    page = paginate(approved, page=1, page_size=5)
    for r in page.items:
        print(r.request_id, r.student_name, r.status.value, r.approver)
    print("Cảnh báo:", state.drain_alerts())


if __name__ == "__main__":
    main()
