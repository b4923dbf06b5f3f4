def money(value):
    return None if value is None else float(value)


def booking_json(b):
    return {
        "id": b.id,
        "userId": b.user_id,
        "partnerId": b.partner_id,
        "date": b.date.isoformat(),
        "startTime": b.start_time,
        "endTime": b.end_time,
        "message": b.message,
        "totalAmount": money(b.total_amount),
        "status": b.status,
        "paymentStatus": b.payment_status,
        "razorpayOrderId": b.razorpay_order_id,
        "razorpayPaymentId": b.razorpay_payment_id,
        "platformCommission": money(b.platform_commission),
        "partnerEarning": money(b.partner_earning),
        "createdAt": b.created_at.isoformat(),
    }


def earnings_json(e):
    return {
        "partnerId": e.partner_id,
        "totalEarnings": money(e.total_earnings),
        "availableBalance": money(e.available_balance),
        "totalWithdrawn": money(e.total_withdrawn),
        "pendingWithdrawals": money(e.pending_withdrawals),
        "withdrawableBalance": money(e.withdrawable_balance),
        "lastWithdrawalAt": e.last_withdrawal_at.isoformat() if e.last_withdrawal_at else None,
    }


def withdrawal_json(w):
    return {
        "id": w.id,
        "partnerId": w.partner_id,
        "amount": money(w.amount),
        "upiId": w.upi_id,
        "status": w.status,
        "adminNotes": w.admin_notes,
        "processedAt": w.processed_at.isoformat() if w.processed_at else None,
        "createdAt": w.created_at.isoformat(),
    }


def wallet_json(wallet, transactions):
    return {
        "balance": money(wallet.balance),
        "transactions": [
            {
                "type": t.type,
                "amount": money(t.amount),
                "reason": t.reason or ("Credited" if t.type == "credit" else "Debited"),
                "createdAt": t.created_at.isoformat(),
            }
            for t in transactions
        ],
    }


def partner_json(p):
    return {
        "id": p.id,
        "userId": p.user_id,
        "name": p.user.full_name,
        "email": p.user.email,
        "bio": p.bio,
        "city": p.city,
        "hourlyRate": money(p.hourly_rate),
        "approvalStatus": p.approval_status,
        "createdAt": p.created_at.isoformat(),
    }


def report_json(r):
    return {
        "id": r.id,
        "reporterId": r.reporter_id,
        "reportedUserId": r.reported_user_id,
        "bookingId": r.booking_id,
        "reason": r.reason,
        "description": r.description,
        "status": r.status,
        "adminNotes": r.admin_notes,
        "resolvedAt": r.resolved_at.isoformat() if r.resolved_at else None,
        "createdAt": r.created_at.isoformat(),
    }
