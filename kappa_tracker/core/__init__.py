"""Kappa Tracker Core: 요구 해석 엔진 (I/O 없음)"""
