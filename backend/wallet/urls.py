from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'commission-rates', views.CommissionRateViewSet, basename='commission-rate')

app_name = 'wallet'

urlpatterns = [
    path('me/', views.my_wallet, name='my-wallet'),
    path('me/withdrawals/', views.my_withdrawals, name='my-withdrawals'),
    path('withdrawals/', views.create_withdrawal, name='create-withdrawal'),
    path('withdrawals/pending/', views.pending_withdrawals, name='pending-withdrawals'),
    path('withdrawals/fee-stats/', views.withdrawal_fee_stats, name='withdrawal-fee-stats'),
    path('withdrawals/<int:pk>/review/', views.review_withdrawal, name='review-withdrawal'),
    path('withheld/', views.withheld_wallets, name='withheld-wallets'),
    path('users/<str:unique_id>/summary/', views.user_wallet_summary, name='user-summary'),
    path('users/<str:unique_id>/release/', views.release_withheld, name='release-withheld'),
    path('users/<str:unique_id>/reject/', views.reject_withheld, name='reject-withheld'),
    path('wallets/', views.WalletListView.as_view(), name='wallet-list'),
    path('', include(router.urls)),
]
