"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- capital: 잔액, 초기 자본, 자본 투입/인출
- ledger: 기간 원장, 수단별 이력
- solvency: 지급 가능 여부
- expenses: 지출 등록, 지출 항목
"""
