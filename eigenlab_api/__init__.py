"""Eigen Explorer web application"""
