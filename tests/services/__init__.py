# tests/services/__init__.py

"""
서비스 계층(codes, integrity, hierarchy_store, lookup_service)과 내보내기 모듈의 단위 테스트 패키지입니다.
"""
