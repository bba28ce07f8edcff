"""시/구 이름 → 도도부현 별칭 테이블

주문 화면에서 사용자가 도도부현 대신 시/구 이름을 입력하는 경우를 위한 정적 매핑입니다.
여러 시/구가 하나의 도도부현에 대응합니다. (다대일, 읽기 전용)
"""

from types import MappingProxyType

LOCATION_ALIASES = MappingProxyType(
    {
        # 北海道
        "札幌市": "北海道",
        "函館市": "北海道",
        "旭川市": "北海道",
        "釧路市": "北海道",
        "帯広市": "北海道",
        "北見市": "北海道",
        "夕張市": "北海道",
        "岩見沢市": "北海道",
        "網走市": "北海道",
        "留萌市": "北海道",
        "苫小牧市": "北海道",
        "稚内市": "北海道",
        "美唄市": "北海道",
        "芦別市": "北海道",
        "江別市": "北海道",
        "赤平市": "北海道",
        "紋別市": "北海道",
        "士別市": "北海道",
        "名寄市": "北海道",
        "三笠市": "北海道",
        "根室市": "北海道",
        "千歳市": "北海道",
        "滝川市": "北海道",
        "砂川市": "北海道",
        "歌志内市": "北海道",
        "深川市": "北海道",
        "富良野市": "北海道",
        "登別市": "北海道",
        "恵庭市": "北海道",
        "伊達市": "北海道",
        "北広島市": "北海道",
        "石狩市": "北海道",
        "北斗市": "北海道",

        # 東京都
        "東京": "東京都",
        "新宿区": "東京都",
        "渋谷区": "東京都",
        "品川区": "東京都",
        "目黒区": "東京都",
        "大田区": "東京都",
        "世田谷区": "東京都",
        "中野区": "東京都",
        "杉並区": "東京都",
        "豊島区": "東京都",
        "北区": "東京都",
        "荒川区": "東京都",
        "板橋区": "東京都",
        "練馬区": "東京都",
        "足立区": "東京都",
        "葛飾区": "東京都",
        "江戸川区": "東京都",
        "八王子市": "東京都",
        "立川市": "東京都",
        "武蔵野市": "東京都",
        "三鷹市": "東京都",
        "青梅市": "東京都",
        "府中市": "東京都",
        "昭島市": "東京都",
        "調布市": "東京都",
        "町田市": "東京都",
        "小金井市": "東京都",
        "小平市": "東京都",
        "日野市": "東京都",
        "東村山市": "東京都",
        "国分寺市": "東京都",
        "国立市": "東京都",
        "福生市": "東京都",
        "狛江市": "東京都",
        "東大和市": "東京都",
        "清瀬市": "東京都",
        "東久留米市": "東京都",
        "武蔵村山市": "東京都",
        "多摩市": "東京都",
        "稲城市": "東京都",
        "羽村市": "東京都",
        "あきる野市": "東京都",
        "西東京市": "東京都",

        # 大阪府
        "大阪市": "大阪府",
        "堺市": "大阪府",
        "岸和田市": "大阪府",
        "豊中市": "大阪府",
        "池田市": "大阪府",
        "吹田市": "大阪府",
        "泉大津市": "大阪府",
        "高槻市": "大阪府",
        "貝塚市": "大阪府",
        "守口市": "大阪府",
        "枚方市": "大阪府",
        "茨木市": "大阪府",
        "八尾市": "大阪府",
        "泉佐野市": "大阪府",
        "富田林市": "大阪府",
        "寝屋川市": "大阪府",
        "河内長野市": "大阪府",
        "松原市": "大阪府",
        "大東市": "大阪府",
        "和泉市": "大阪府",
        "箕面市": "大阪府",
        "柏原市": "大阪府",
        "羽曳野市": "大阪府",
        "門真市": "大阪府",
        "摂津市": "大阪府",
        "高石市": "大阪府",
        "藤井寺市": "大阪府",
        "東大阪市": "大阪府",
        "泉南市": "大阪府",
        "四條畷市": "大阪府",
        "交野市": "大阪府",
        "大阪狭山市": "大阪府",
        "阪南市": "大阪府",
    }
)
