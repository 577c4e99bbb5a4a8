#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0
Conversational safety and persona orchestration engine for a youth wellness companion

Version: 1.0.0
Date: 2026-10-19
"""

__version__ = "1.0.0"
