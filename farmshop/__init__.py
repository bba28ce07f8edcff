"""
Django 프로젝트 초기화 파일
"""
