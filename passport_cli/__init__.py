"""Operator command line for the Practitioner Passport backend"""
