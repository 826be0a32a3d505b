# invoicing/services/scoping.py
from invoicing.models import Client, CompanyProfile, Invoice, Project

def user_clients(user):
    return Client.objects.filter(user=user)

def user_projects(user):
    return Project.objects.filter(user=user).select_related("client")

def user_companies(user):
    return CompanyProfile.objects.filter(user=user)

def user_invoices(user):
    return Invoice.objects.filter(user=user).select_related("client", "project", "company")
