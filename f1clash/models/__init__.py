"""Data models for car parts and drivers."""